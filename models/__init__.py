from models.application import LoanApplication

__all__ = [
    "LoanApplication",
]
