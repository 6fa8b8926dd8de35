from rest_framework.views import exception_handler


def stockflow_exception_handler(exc, context):
    """
    DRF's handler renders errors as `{"detail": ...}`; every StockFlow client
    reads `message`, so the detail string is re-keyed. Field-level validation
    errors are kept alongside under `errors`.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    if isinstance(data, dict) and 'detail' in data:
        response.data = {"message": str(data['detail'])}
    elif isinstance(data, list):
        response.data = {"message": " ".join(str(item) for item in data)}
    elif isinstance(data, dict):
        response.data = {"message": "Invalid request data.", "errors": data}
    return response
