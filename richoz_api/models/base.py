from ..database import Base

__all__ = ["Base"]
