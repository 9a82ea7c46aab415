""" Process-wide defaults for new connections. Each value can be overridden
    with an environment variable, read once when this module is imported;
    any value passed explicitly to :func:`sredis.connect` or
    :func:`sredis.pconnect` takes precedence over these defaults.
"""

import os


def _number(name, default, kind=float):
    """ Return the environment variable *name* interpreted as a *kind*,
        or *default* if the variable is not set.
    """

    raw = os.environ.get(name)

    if raw is None or raw.strip() == '':
        return default

    try:
        return kind(raw)
    except ValueError:
        raise ValueError('invalid value for %s: %r' % (name, raw))


host = os.environ.get('SREDIS_HOST', '127.0.0.1')
port = _number('SREDIS_PORT', 6379, int)

# Seconds allowed for the TCP connect to complete.
connect_timeout = _number('SREDIS_CONNECT_TIMEOUT', 2.0)

# Seconds close() will wait for the server to acknowledge QUIT.
quit_timeout = _number('SREDIS_QUIT_TIMEOUT', 1.0)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
