''' Wrapper module to select the most performant available library to handle
    the equivalent of :func:`json.loads` and :func:`json.dumps`. Payloads
    on the wire are text, so :func:`dumps` here always returns compact
    :class:`str` output, regardless of which library is doing the work.
'''

# Conditionally importing the libraries avoids importing less efficient
# libraries if the faster ones are available. orjson is a declared
# dependency; msgspec is used when the 'fast' extra is installed.

msgspec = None
orjson = None
json = None

try:
    import msgspec
except ImportError:
    pass

if msgspec is None:
    try:
        import orjson
    except ImportError:
        pass

if msgspec is None and orjson is None:
    import json


# Both msgspec and orjson emit compact bytes. orjson needs to be told to
# accept non-string dictionary keys, which the other two convert to strings. The standard library emits
# text with whitespace after separators; suppress that so the encoded form
# is identical no matter which backend is active.

def json_dumps(value):
    return json.dumps(value, separators=(',', ':'), ensure_ascii=False)

if msgspec is not None:
    encoder = msgspec.json.Encoder()
    decoder = msgspec.json.Decoder()
    DecodeError = msgspec.DecodeError

    def dumps(value):
        return encoder.encode(value).decode()

    loads = decoder.decode

elif orjson is not None:
    DecodeError = orjson.JSONDecodeError

    def dumps(value):
        return orjson.dumps(value, option=orjson.OPT_NON_STR_KEYS).decode()

    loads = orjson.loads

else:
    DecodeError = json.JSONDecodeError
    dumps = json_dumps
    loads = json.loads


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
