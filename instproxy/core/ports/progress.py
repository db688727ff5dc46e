from typing import Callable


ProgressCallback = Callable[[int], None]
"""
Synchronous sink receiving an overall completion percentage.

It is invoked inline from the receive loop, so it must return quickly:
any blocking work stalls processing of the next status message.
"""
