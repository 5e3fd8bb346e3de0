"""Errors raised while building signed URLs."""


class TooManyChoicesError(ValueError):
    """More choices were supplied than the client's max_choices allows."""

    def __init__(self, count: int, limit: int):
        self.count = count
        self.limit = limit
        super().__init__(
            f"Too many choices presented to build URL ({count} > {limit})"
        )
