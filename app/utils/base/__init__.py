from app.utils.base.enums import FailureKind

__all__ = ["FailureKind"]
