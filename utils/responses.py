from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(data=None, message="OK", status=200):
    return JSONResponse(
        status_code=status,
        content=jsonable_encoder({
            "ok": True,
            "data": data or {},
            "error": None,
            "message": message,
        })
    )


def error_response(error_code, status=400, message="An error occurred", data=None):
    return JSONResponse(
        status_code=status,
        content=jsonable_encoder({
            "ok": False,
            "data": data or {},
            "error": error_code,
            "message": message,
        })
    )
