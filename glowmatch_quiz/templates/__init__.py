"""Templates package for quiz documents."""

from .base_template import DocumentTemplate
from .report_template import ReportTemplate

__all__ = ["DocumentTemplate", "ReportTemplate"]
