from flask import request

from redweb.errors import ValidationError


def json_body():
    """Parsed JSON body as a dict, or None when the body is empty or not JSON.

    Any other JSON value (a list, a string, a number) is a 400.
    """
    data = request.get_json(force=True, silent=True)
    if data is not None and not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
