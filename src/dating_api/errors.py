class StoreError(Exception):
    message = "unexpected error occurred"
    status_code = 500

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class SwipeRequestInvalid(StoreError):
    message = "failed to swipe on profile"
    status_code = 400


class QueryTimedOut(StoreError):
    message = "query timed out"
    status_code = 504


class DatabaseError(StoreError):
    message = "could not access data store"
    status_code = 500


class NoValidSession(StoreError):
    message = "please log in to your account"
    status_code = 401


class LoginFailed(StoreError):
    message = "could not log in"
    status_code = 401
