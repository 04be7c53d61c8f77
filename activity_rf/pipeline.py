from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

import pandas as pd

from .data_loader import DataLoader, validate_label
from .feature_filter import FeatureFilter
from .split import stratified_split
from .train import ResamplingConfig, Trainer, TrainingResult


@dataclass(frozen=True)
class PipelineOutput:
    feature_filter: FeatureFilter
    result: TrainingResult
    predictions: pd.DataFrame
    results_dir: Optional[Path]


def _banner(title: str) -> None:
    print("\n" + "="*60)
    print(title)
    print("="*60)


def clean_datasets(
    train_df: pd.DataFrame,
    eval_df: pd.DataFrame,
    config: Dict[str, Any]
) -> Tuple[FeatureFilter, pd.DataFrame, pd.DataFrame]:
    """
    Learn the retained columns on the training table and apply them to both tables.

    The evaluation table must carry every retained feature column; the label
    column is only required in the training table.
    """
    label_column = config['data']['label_column']
    feature_filter = FeatureFilter(
        threshold=config['filter']['missing_threshold'],
        exclude_columns=config['data']['exclude_columns'],
    )
    train_clean = feature_filter.fit_transform(train_df)
    validate_label(train_clean, label_column)

    required = [col for col in feature_filter.retained_columns if col != label_column]
    eval_clean = feature_filter.transform(eval_df, required=required, context="evaluation data")

    return feature_filter, train_clean, eval_clean


def run_pipeline(
    config: Dict[str, Any],
    train_df: Optional[pd.DataFrame] = None,
    eval_df: Optional[pd.DataFrame] = None,
    save: bool = True
) -> PipelineOutput:
    """Run load, clean, split, train/evaluate, predict and report in order."""
    verbose = config['output'].get('verbose', True)
    label_column = config['data']['label_column']
    seed = config['training']['seed']

    if verbose:
        _banner("STEP 1: Loading Data")
    if train_df is None or eval_df is None:
        train_df, eval_df = DataLoader(config).load_data()
    else:
        validate_label(train_df, label_column)

    if verbose:
        _banner("STEP 2: Filtering Sparse Columns")
    feature_filter, train_clean, eval_clean = clean_datasets(train_df, eval_df, config)
    if verbose:
        print(f"✓ Retained {len(feature_filter.retained_columns)} of {train_df.shape[1]} columns "
              f"(threshold {feature_filter.threshold})")
        print(f"✓ Dropped {len(feature_filter.dropped_columns)} columns")

    if verbose:
        _banner("STEP 3: Stratified Train/Validation Split")
    train_set, validation_set = stratified_split(
        train_clean, label_column, config['split']['train_fraction'], seed
    )
    if verbose:
        print(f"✓ Training rows: {len(train_set)}")
        print(f"✓ Validation rows: {len(validation_set)}")

    if verbose:
        _banner("STEP 4: Model Training")
    trainer = Trainer(config)
    result = trainer.train_and_evaluate(
        train_set, validation_set, label_column, ResamplingConfig.from_config(config)
    )

    if verbose:
        _banner("STEP 5: Predicting Evaluation Data")
    predicted = trainer.predict(eval_clean)
    predictions = predicted.to_frame()
    id_column = config['data'].get('eval_id_column')
    if id_column and id_column in eval_df.columns:
        predictions.insert(0, id_column, eval_df.loc[predicted.index, id_column])
    if verbose:
        print(predictions.to_string())

    results_dir = None
    if save:
        if verbose:
            _banner("STEP 6: Saving Results")
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        results_dir = trainer.save_results(
            Path(config['output']['results_dir']) / f"run_{timestamp}", predictions
        )

    return PipelineOutput(
        feature_filter=feature_filter,
        result=result,
        predictions=predictions,
        results_dir=results_dir,
    )
