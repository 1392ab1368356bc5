"""Fixed response bodies."""

from starlette.responses import HTMLResponse, PlainTextResponse

NOT_FOUND_HTML = """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta http-equiv="X-UA-Compatible" content="IE=edge">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>URL not found</title>
</head>
<body>
    <h1>Not Found</h1>
    <h3>The requested URL was not found on this server.</h3>
</body>
</html>
"""

DIRECTORY_ERROR_HTML = """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Error</title>
</head>
<body>
    <h1>Error Reading Directory</h1>
    <p>Unable to access directory contents.</p>
</body>
</html>
"""

FORBIDDEN_TEXT = "Forbidden"
TEMPLATE_ERROR_TEXT = "Internal Server Error - Template Rendering Failed"
STREAM_ERROR_TEXT = "Error reading file"


def not_found() -> HTMLResponse:
    return HTMLResponse(NOT_FOUND_HTML, status_code=404)


def forbidden() -> PlainTextResponse:
    return PlainTextResponse(FORBIDDEN_TEXT, status_code=403)


def template_error() -> PlainTextResponse:
    return PlainTextResponse(TEMPLATE_ERROR_TEXT, status_code=500)


def stream_error() -> PlainTextResponse:
    return PlainTextResponse(STREAM_ERROR_TEXT, status_code=500)
