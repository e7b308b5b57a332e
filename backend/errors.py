# backend/errors.py


class SalonError(Exception):
    """Base class for failures surfaced through the RPC facade"""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(SalonError):
    status_code = 404
    code = "not_found"

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} with id {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class UniqueConstraintViolation(SalonError):
    status_code = 409
    code = "unique_violation"


class CustomerInUseError(SalonError):
    """Customer still referenced by appointments or service history"""

    status_code = 409
    code = "customer_in_use"


class StorageError(SalonError):
    status_code = 500
    code = "storage_failure"
