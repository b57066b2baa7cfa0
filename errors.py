# errors.py — failures the API turns into JSON error bodies


class BookstoreError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookstoreError):
    status_code = 400


class NotFoundError(BookstoreError):
    status_code = 404


class ConflictError(BookstoreError):
    status_code = 409


class BackendError(BookstoreError):
    status_code = 500
