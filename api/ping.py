from api._shared import NO_STORE_CACHE_CONTROL, json_response, preflight_response


def handler(request):
    # Ultra-light health check - never touches the chain
    if request.method == "OPTIONS":
        return preflight_response()
    return json_response({"ok": True}, 200, {"Cache-Control": NO_STORE_CACHE_CONTROL})
