"""Errors raised while building checkers (never while running them)."""


class InvalidValidatorConfig(ValueError):
    """A keyword validator was constructed with unusable configuration."""

    def __init__(self, keyword: str, message: str):
        self.keyword = keyword
        super().__init__(f"Invalid '{keyword}' configuration: {message}")
