class NotificationDeliveryError(Exception):
    """A post-booking side effect failed. Caught at the task boundary, never re-raised."""

    def __init__(self, task: str, message: str):
        self.task = task
        self.message = message
        super().__init__(f"{task}: {message}")
