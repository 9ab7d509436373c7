"""iValidate - evidence-based market validation for startup ideas."""

__version__ = "1.0.0"
