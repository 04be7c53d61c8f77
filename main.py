#!/usr/bin/env python
"""
Activity recognition - random forest on wearable sensor data
Main execution script for training and evaluation
"""

import sys
import warnings

from activity_rf.config import load_config
from activity_rf.exceptions import ColumnMismatchError, ConfigError, DataValidationError, ModelTrainingError
from activity_rf.pipeline import run_pipeline

warnings.filterwarnings('ignore')


def main(config_path: str = "config.yaml"):
    """Main execution pipeline."""
    print("="*60)
    print("Activity Recognition - Random Forest Baseline")
    print("="*60)
    print("🚀 Key Features:")
    print("  - Missingness-driven column filtering")
    print("  - Stratified train/validation split")
    print("  - Repeated k-fold cross-validation")
    print("="*60)

    try:
        config = load_config(config_path)
        print(f"\n✓ Configuration loaded")

        output = run_pipeline(config)
    except (ConfigError, DataValidationError, ColumnMismatchError, ModelTrainingError) as e:
        print(f"\n❌ Error: {e}")
        sys.exit(1)

    result = output.result

    print("\n" + "="*60)
    print("TRAINING COMPLETE")
    print("="*60)
    print(f"✓ CV accuracy: {result.cv_accuracy:.4f}")
    print(f"✓ Validation accuracy: {result.validation_accuracy:.4f}")
    print(f"✓ Results saved to: {output.results_dir}")
    print(f"✓ Evaluation predictions generated: {len(output.predictions)}")
    print("="*60)

    return output


if __name__ == "__main__":
    main()
