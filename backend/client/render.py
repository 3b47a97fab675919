import sys


class ConsoleRenderer:
    """StateStore subscriber: prints new log lines and status changes."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def __call__(self, old, new):
        for line in new.log[len(old.log):]:
            print(line, file=self.stream)
        if new.status != old.status:
            print(f"Status: {new.status}", file=self.stream)
