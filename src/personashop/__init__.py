"""personashop: persona-driven storefront personalization engine."""

__version__ = "0.1.0"
