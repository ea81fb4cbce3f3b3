# TuyaRelay Module
# -*- coding: utf-8 -*-

# TuyaRelay Error Response Codes (numbering shared with tinytuya)
ERR_JSON = 900
ERR_CONNECT = 901
ERR_TIMEOUT = 902
ERR_RANGE = 903
ERR_PAYLOAD = 904
ERR_OFFLINE = 905
ERR_STATE = 906
ERR_KEY_OR_VER = 914
ERR_CONFIG = 915

error_codes = {
    ERR_JSON: "Invalid JSON Response from Device",
    ERR_CONNECT: "Network Error: Unable to Connect",
    ERR_TIMEOUT: "Timeout Waiting for Peer",
    ERR_RANGE: "Specified Value Out of Range",
    ERR_PAYLOAD: "Unexpected Payload from Device",
    ERR_OFFLINE: "Network Error: Device Unreachable",
    ERR_STATE: "Device in Unknown State",
    ERR_KEY_OR_VER: "Check device key or version",
    ERR_CONFIG: "Invalid Configuration",
    None: "Unknown Error",
}


def error_json(number=None, payload=None):
    """Return error details in JSON"""
    try:
        spayload = payload if isinstance(payload, str) else repr(payload)
    except Exception:
        spayload = '""'

    vals = (error_codes[number] if number in error_codes else error_codes[None], str(number), spayload)
    return {"Error": vals[0], "Err": vals[1], "Payload": vals[2]}


def is_error(response):
    """True if `response` is an error dict from tuyarelay or tinytuya"""
    return isinstance(response, dict) and ('Err' in response or 'Error' in response)
