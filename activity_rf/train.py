import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, List, Optional

import numpy as np
import pandas as pd

from .exceptions import ColumnMismatchError, DataValidationError
from .model import ActivityClassifier
from .evaluate import (
    accuracy_from_confusion,
    build_confusion_matrix,
    calculate_class_metrics,
    print_evaluation_summary,
)


@dataclass(frozen=True)
class ResamplingConfig:
    n_folds: int = 10
    n_repeats: int = 2
    seed: int = 42
    n_jobs: int = -1

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ResamplingConfig":
        training = config['training']
        return cls(
            n_folds=training['n_folds'],
            n_repeats=training['n_repeats'],
            seed=training['seed'],
            n_jobs=training['n_jobs'],
        )

    def describe(self) -> str:
        return f"{self.n_folds}-fold CV, repeated {self.n_repeats} times"


@dataclass(frozen=True)
class TrainingResult:
    model: ActivityClassifier
    feature_columns: List[str]
    classes: List[Any]
    cv_accuracy: float
    validation_accuracy: float
    confusion_matrix: pd.DataFrame
    class_metrics: Dict[str, Any]
    best_params: Dict[str, Any]
    cv_results: pd.DataFrame
    resampling: ResamplingConfig
    n_train: int
    n_validation: int


def _feature_columns(dataset: pd.DataFrame, label_column: str) -> List[str]:
    return [col for col in dataset.columns if col != label_column]


def _check_observed(X: pd.DataFrame, context: str) -> None:
    counts = X.isna().sum()
    counts = counts[counts > 0]
    if len(counts):
        detail = ", ".join(f"{col}={n}" for col, n in counts.items())
        raise DataValidationError(f"{context} has missing feature values: {detail}")


class Trainer:
    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.model = ActivityClassifier(config)
        self.result: Optional[TrainingResult] = None
        self.verbose = config['output'].get('verbose', True)

    def train_and_evaluate(
        self,
        train_set: pd.DataFrame,
        validation_set: pd.DataFrame,
        label_column: str,
        resampling: ResamplingConfig
    ) -> TrainingResult:
        """
        Fit the classifier on the training split and score it on the validation split.

        Args:
            train_set: Training rows including the label column
            validation_set: Held-out rows including the label column
            label_column: Target column name
            resampling: Cross-validation configuration for model selection

        Returns:
            TrainingResult with the CV accuracy and the independent validation accuracy
        """
        if len(train_set) == 0 or len(validation_set) == 0:
            raise DataValidationError("Training and validation sets must both contain rows")
        for name, frame in (('training set', train_set), ('validation set', validation_set)):
            if label_column not in frame.columns:
                raise DataValidationError(f"Label column '{label_column}' not found in {name}")

        feature_cols = _feature_columns(train_set, label_column)
        if not feature_cols:
            raise DataValidationError("No feature columns left to train on")

        missing = [col for col in feature_cols if col not in validation_set.columns]
        if missing:
            raise ColumnMismatchError(missing, context="validation set")

        X_train = train_set[feature_cols]
        y_train = train_set[label_column].to_numpy()
        X_val = validation_set[feature_cols]
        y_val = validation_set[label_column].to_numpy()
        _check_observed(X_train, "Training set")
        _check_observed(X_val, "Validation set")

        if self.verbose:
            print(f"\n{'='*60}")
            print(f"Training {self.model.model_type} with {resampling.describe()}")
            print(f"{'='*60}")
            print(f"Number of features: {len(feature_cols)}")
            print(f"Number of samples: {len(X_train)}")
            print(f"Number of classes: {len(np.unique(y_train))}")

        self.model.fit(X_train, y_train, resampling)

        val_preds = self.model.predict(X_val)
        labels = sorted(set(self.model.classes) | set(y_val.tolist()), key=str)
        matrix = build_confusion_matrix(y_val, val_preds, labels=labels)

        self.result = TrainingResult(
            model=self.model,
            feature_columns=feature_cols,
            classes=self.model.classes,
            cv_accuracy=self.model.cv_accuracy,
            validation_accuracy=accuracy_from_confusion(matrix),
            confusion_matrix=matrix,
            class_metrics=calculate_class_metrics(y_val, val_preds),
            best_params=self.model.best_params,
            cv_results=self.model.cv_results(),
            resampling=resampling,
            n_train=len(X_train),
            n_validation=len(X_val),
        )

        if self.verbose:
            print_evaluation_summary(self.result)

        return self.result

    def predict(self, dataset: pd.DataFrame) -> pd.Series:
        """Predict labels for rows of dataset using the trained feature columns."""
        if self.result is None:
            raise ValueError("No models have been trained yet")

        feature_cols = self.result.feature_columns
        missing = [col for col in feature_cols if col not in dataset.columns]
        if missing:
            raise ColumnMismatchError(missing, context="evaluation data")

        X = dataset[feature_cols]
        _check_observed(X, "Evaluation data")

        predictions = self.model.predict(X)
        return pd.Series(predictions, index=dataset.index, name='predicted')

    def save_results(self, save_dir: Path, predictions: Optional[pd.DataFrame] = None) -> Path:
        """Save the evaluation report."""
        if self.result is None:
            raise ValueError("No models have been trained yet")

        save_dir = Path(save_dir)
        save_dir.mkdir(parents=True, exist_ok=True)
        result = self.result

        cv_results = {
            'model_type': self.model.model_type,
            'cv_accuracy': result.cv_accuracy,
            'validation_accuracy': result.validation_accuracy,
            'out_of_sample_error': 1.0 - result.validation_accuracy,
            'best_params': result.best_params,
            'n_folds': result.resampling.n_folds,
            'n_repeats': result.resampling.n_repeats,
            'seed': result.resampling.seed,
            'n_train': result.n_train,
            'n_validation': result.n_validation,
            'feature_columns': result.feature_columns,
            'classes': [str(c) for c in result.classes],
        }

        with open(save_dir / "cv_results.json", 'w') as f:
            json.dump(cv_results, f, indent=2, default=str)

        result.cv_results.to_csv(save_dir / "cv_candidates.csv", index=False)
        result.confusion_matrix.to_csv(save_dir / "confusion_matrix.csv")

        if predictions is not None:
            predictions.to_csv(save_dir / "predictions.csv")

        if self.config['output'].get('save_feature_importance', True):
            importance_df = self.model.get_feature_importance()
            importance_df.to_csv(save_dir / "feature_importance.csv", index=False)

            if self.verbose:
                print("\nTop 20 Most Important Features:")
                print(importance_df.head(20).to_string(index=False))

        if self.verbose:
            print(f"\n✓ Results saved to {save_dir}")

        return save_dir
