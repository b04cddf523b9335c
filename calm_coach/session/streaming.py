"""
Word-paced reveal of an assistant reply that has already been received in full.

This is presentation only: the stored message is never touched, and a reveal
can be skipped at any point to show the whole text at once.
"""
import time
from typing import Iterator

from calm_coach.config import STREAM_WORD_DELAY_S


def reveal_frames(text: str) -> Iterator[str]:
    """Successive prefixes of text, one more word each time."""
    if not text:
        yield ""
        return

    words = text.split(" ")
    for i in range(1, len(words) + 1):
        yield " ".join(words[:i])


class StreamingReveal:
    def __init__(self, text: str, word_delay_s: float = STREAM_WORD_DELAY_S, sleep=time.sleep):
        self.text = text
        self.word_delay_s = word_delay_s
        self._sleep = sleep
        self._skipped = False
        self.is_streaming = False

    def skip(self):
        self._skipped = True

    def __iter__(self) -> Iterator[str]:
        self.is_streaming = True
        try:
            for frame in reveal_frames(self.text):
                if self._skipped:
                    break
                yield frame
                if frame != self.text:
                    self._sleep(self.word_delay_s)
            if self._skipped:
                yield self.text
        finally:
            self.is_streaming = False
