"""
Result sentinels shared by the loaders and cache adapters.
"""


class _NotFound:
    """Well-formed request, store confirmed there is no matching record."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __reduce__(self):
        return (_NotFound, ())

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


NOT_FOUND = _NotFound()
