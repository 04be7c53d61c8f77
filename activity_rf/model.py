from typing import Dict, Any, List, Optional

import numpy as np
import pandas as pd
from lightgbm import LGBMClassifier
from pandas.api import types as ptypes
from sklearn.compose import ColumnTransformer
from sklearn.ensemble import RandomForestClassifier
from sklearn.model_selection import GridSearchCV, RepeatedStratifiedKFold
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder

from .exceptions import ModelTrainingError


def categorical_features(X: pd.DataFrame) -> List[str]:
    """Columns that need one-hot encoding (text, categorical and boolean)."""
    return [
        col for col in X.columns
        if ptypes.is_object_dtype(X[col])
        or ptypes.is_string_dtype(X[col])
        or isinstance(X[col].dtype, pd.CategoricalDtype)
        or ptypes.is_bool_dtype(X[col])
    ]


def build_preprocessor(X: pd.DataFrame) -> ColumnTransformer:
    """
    One-hot encode categorical features and pass numeric features through.

    Categories are fixed from X so every cross-validation fold produces the
    same encoded width.
    """
    cat_cols = categorical_features(X)
    num_cols = [col for col in X.columns if col not in cat_cols]
    categories = [sorted(pd.unique(X[col].dropna()).tolist(), key=str) for col in cat_cols]

    transformers = []
    if cat_cols:
        transformers.append((
            'cat',
            OneHotEncoder(categories=categories, handle_unknown='ignore', sparse_output=False),
            cat_cols,
        ))
    if num_cols:
        transformers.append(('num', 'passthrough', num_cols))

    return ColumnTransformer(transformers, verbose_feature_names_out=False)


def encoded_width(X: pd.DataFrame) -> int:
    """Number of model inputs after one-hot encoding."""
    cat_cols = categorical_features(X)
    n_levels = sum(int(X[col].dropna().nunique()) for col in cat_cols)
    return len(X.columns) - len(cat_cols) + n_levels


def mtry_grid(n_features: int, length: int = 3) -> List[int]:
    """Evenly spaced candidate counts of features tried per split, from 2 up to n_features."""
    if n_features < 1:
        raise ValueError("At least one feature is required")
    if n_features <= 2:
        return [n_features]
    grid = np.floor(np.linspace(2, n_features, max(length, 1))).astype(int)
    return sorted({int(v) for v in grid})


class ActivityClassifier:
    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.model_type = config['training']['model_type']
        self.search: Optional[GridSearchCV] = None
        self.model: Optional[Pipeline] = None
        self.feature_cols: Optional[List[str]] = None

    def _create_estimator(self, seed: int):
        """Create a new single-threaded classifier; the grid search owns the parallelism."""
        if self.model_type == 'random_forest':
            params = self.config['random_forest']
            return RandomForestClassifier(
                n_estimators=params['n_estimators'],
                random_state=seed,
                n_jobs=1,
            )

        params = self.config['lgbm'].copy()
        params.pop('num_leaves_grid', None)
        params['n_jobs'] = 1
        return LGBMClassifier(random_state=seed, **params)

    def _param_grid(self, X: pd.DataFrame) -> Dict[str, List[Any]]:
        if self.model_type == 'random_forest':
            params = self.config['random_forest']
            width = encoded_width(X)
            grid = params.get('max_features_grid') or mtry_grid(width, params.get('mtry_grid_length', 3))
            return {'classifier__max_features': [min(int(v), width) for v in grid]}

        return {'classifier__num_leaves': list(self.config['lgbm']['num_leaves_grid'])}

    def fit(self, X: pd.DataFrame, y: np.ndarray, resampling) -> "ActivityClassifier":
        """
        Tune and fit the classifier with repeated stratified k-fold cross-validation.

        Args:
            X: Training features
            y: Training labels
            resampling: ResamplingConfig with fold/repeat counts, seed and n_jobs
        """
        self.feature_cols = list(X.columns)

        pipeline = Pipeline([
            ('preprocess', build_preprocessor(X)),
            ('classifier', self._create_estimator(resampling.seed)),
        ])
        cv = RepeatedStratifiedKFold(
            n_splits=resampling.n_folds,
            n_repeats=resampling.n_repeats,
            random_state=resampling.seed,
        )
        self.search = GridSearchCV(
            pipeline,
            param_grid=self._param_grid(X),
            scoring='accuracy',
            cv=cv,
            n_jobs=resampling.n_jobs,
            refit=True,
            error_score='raise',
        )

        try:
            self.search.fit(X, y)
        except Exception as exc:
            raise ModelTrainingError(f"{self.model_type} training failed: {exc}") from exc

        self.model = self.search.best_estimator_
        return self

    def _check_fitted(self) -> None:
        if self.model is None:
            raise ValueError("No model has been trained yet")

    @property
    def cv_accuracy(self) -> float:
        self._check_fitted()
        return float(self.search.best_score_)

    @property
    def best_params(self) -> Dict[str, Any]:
        self._check_fitted()
        return {k.replace('classifier__', ''): v for k, v in self.search.best_params_.items()}

    @property
    def classes(self) -> List[Any]:
        self._check_fitted()
        return list(self.model.classes_)

    def cv_results(self) -> pd.DataFrame:
        """Mean and spread of the CV accuracy for each candidate."""
        self._check_fitted()
        results = pd.DataFrame(self.search.cv_results_)
        params = pd.json_normalize(results['params']).rename(columns=lambda c: c.replace('classifier__', ''))
        summary = results[['mean_test_score', 'std_test_score', 'rank_test_score']]
        return pd.concat([params, summary], axis=1).sort_values('rank_test_score').reset_index(drop=True)

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        """Predict class labels."""
        self._check_fitted()
        return self.model.predict(X[self.feature_cols])

    def predict_proba(self, X: pd.DataFrame) -> np.ndarray:
        """Get class probabilities, columns ordered as ``classes``."""
        self._check_fitted()
        return self.model.predict_proba(X[self.feature_cols])

    def get_feature_importance(self) -> pd.DataFrame:
        """Impurity (or split) importance of each encoded feature."""
        self._check_fitted()
        names = self.model.named_steps['preprocess'].get_feature_names_out()
        importance = self.model.named_steps['classifier'].feature_importances_

        importance_df = pd.DataFrame({
            'feature': names,
            'importance': importance
        })
        importance_df = importance_df.sort_values('importance', ascending=False).reset_index(drop=True)

        return importance_df
