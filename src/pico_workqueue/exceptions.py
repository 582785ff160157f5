class WorkQueueError(Exception):
    pass

class InvalidConfigurationError(WorkQueueError):
    pass

class InvalidArgumentError(WorkQueueError):
    pass

class HandlerError(WorkQueueError):
    def __init__(self, error):
        super().__init__(f"Handler reported an error: {error!r}")
        self.error = error

class DuplicateCompletionError(WorkQueueError):
    def __init__(self, task):
        super().__init__(f"Task for payload {task.payload!r} was completed more than once.")
        self.task = task

class AbandonedTaskError(WorkQueueError):
    def __init__(self, payload):
        super().__init__(f"Task for payload {payload!r} was dropped from the queue before it ran.")
        self.payload = payload
