class FakeTimer:
    """Stands in for threading.Timer; fires only when the test says so."""

    def __init__(self, delay, fn):
        self.delay = delay
        self.fn = fn
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.fn()


class TimerLog:
    def __init__(self):
        self.timers = []

    def __call__(self, delay, fn):
        t = FakeTimer(delay, fn)
        self.timers.append(t)
        return t

    def live(self):
        return [t for t in self.timers if not t.cancelled]
