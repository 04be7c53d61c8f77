from .config import load_config, build_config
from .feature_filter import FeatureFilter, filter_columns, missingness
from .split import stratified_split
from .train import ResamplingConfig, Trainer, TrainingResult
from .pipeline import run_pipeline

__version__ = "0.1.0"
