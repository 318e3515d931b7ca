HEADER_ACCEPT = "Accept"
HEADER_ACCEPT_ENCODING = "Accept-Encoding"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_CONTENT_ENCODING = "Content-Encoding"
HEADER_CONTENT_LENGTH = "Content-Length"
HEADER_USER_AGENT = "User-Agent"
HEADER_VARY = "Vary"

MIME_APPLICATION_JSON = "application/json"
MIME_TEXT_PLAIN = "text/plain"
MIME_TEXT_HTML = "text/html"

ENCODING_GZIP = "gzip"

METHOD_GET = "GET"
METHOD_POST = "POST"
METHOD_PUT = "PUT"
METHOD_DELETE = "DELETE"
METHOD_PATCH = "PATCH"

ALLOWED_METHODS = (METHOD_GET, METHOD_POST, METHOD_PUT, METHOD_DELETE, METHOD_PATCH)
