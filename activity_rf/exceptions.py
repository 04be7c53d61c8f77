class ConfigError(ValueError):
    """Raised when a configuration value is missing or out of range."""


class DataValidationError(ValueError):
    """Raised when an input table cannot be used as-is."""


class ColumnMismatchError(ValueError):
    """Raised when a dataset lacks columns the trained model depends on."""

    def __init__(self, missing_columns, context: str = "dataset"):
        self.missing_columns = list(missing_columns)
        super().__init__(
            f"{context} is missing {len(self.missing_columns)} required column(s): "
            f"{', '.join(self.missing_columns)}"
        )


class ModelTrainingError(RuntimeError):
    """Raised when the learning library fails to fit a model."""
