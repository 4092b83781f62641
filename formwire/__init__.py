from formwire.multipart import (
    BodyData,
    BodyFile,
    DataContent,
    FileContent,
    MultipartFormEncoder,
    Part,
    TextContent,
    copy_stream,
)
from formwire.form import encode_form
from formwire.models import (
    FileData,
    FormParameters,
    HTTPContentType,
    HTTPMethod,
    HTTPRequest,
    HTTPResponse,
    JSONParameters,
    MultipartBody,
    RawData,
)
from formwire.builder import PreparedRequest, RequestBuilder, build_request
from formwire.errors import (
    FormwireError,
    HTTPError,
    HTTPStatusError,
    InvalidFileError,
    InvalidFormDataError,
    InvalidOutputFileError,
    InvalidRequestBodyError,
    InvalidResponseError,
    MultipartError,
    RequestError,
    ResponseError,
    StreamError,
    TooMuchDataForMemoryError,
    UnknownResponseError,
)

__all__ = [
    "BodyData",
    "BodyFile",
    "DataContent",
    "FileContent",
    "MultipartFormEncoder",
    "Part",
    "TextContent",
    "copy_stream",
    "encode_form",
    "FileData",
    "FormParameters",
    "HTTPContentType",
    "HTTPMethod",
    "HTTPRequest",
    "HTTPResponse",
    "JSONParameters",
    "MultipartBody",
    "RawData",
    "PreparedRequest",
    "RequestBuilder",
    "build_request",
    "FormwireError",
    "HTTPError",
    "HTTPStatusError",
    "InvalidFileError",
    "InvalidFormDataError",
    "InvalidOutputFileError",
    "InvalidRequestBodyError",
    "InvalidResponseError",
    "MultipartError",
    "RequestError",
    "ResponseError",
    "StreamError",
    "TooMuchDataForMemoryError",
    "UnknownResponseError",
]
