from .text import Text, TextUpdate
from .line import Line, LineCreate, Outcome

__all__ = ['Text', 'TextUpdate', 'Line', 'LineCreate', 'Outcome']
