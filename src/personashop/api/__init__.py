"""HTTP API for the personalization engine."""
