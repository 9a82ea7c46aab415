"""Protocol constants.

Keep these in one place to avoid stringly-typed command handling.
"""

# Type tags, the first byte of every reply line.
STATUS = b"+"
ERROR = b"-"
INTEGER = b":"
BULK = b"$"
ARRAY = b"*"

# Element tags accepted inside an array reply.
ARRAY_ELEMENTS = (INTEGER, BULK)

CRLF = b"\r\n"

# Length/count announcing an absent bulk string or array.
NIL_LENGTH = -1

# Commands issued by the client itself.
PING = "PING"
QUIT = "QUIT"
UNSUBSCRIBE = "UNSUBSCRIBE"

# First element of a published-message array reply.
MESSAGE = b"message"
