from fastapi import HTTPException, status


class ProductNotFoundError(HTTPException):
    def __init__(self, product_id: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=f"Product {product_id} not found")


class OrderNotFoundError(HTTPException):
    def __init__(self, order_id: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=f"Order {order_id} not found")


class CraftsmanNotFoundError(HTTPException):
    def __init__(self, craftsman_id: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=f"Craftsman {craftsman_id} not found")


class ListingQueryFailed(HTTPException):
    """The backing collection could not answer a listing query.

    The original exception is kept on ``cause`` (and chained as ``__cause__``
    by the raiser) so it can be logged; clients only see the resource name.
    """

    def __init__(self, cause: BaseException, resource: str = "records"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Failed to fetch {resource}",
        )
        self.cause = cause
        self.resource = resource
