from flask import Flask, make_response, request

from api import image, metadata, ping
from api._shared import Config, preflight_response
from api.contract import ContractReader

# Vercel: export a WSGI Flask app named `app` with ONLY API routes (no static serving)


def create_app(config: Config | None = None, reader: ContractReader | None = None) -> Flask:
    """
    Build the WSGI app.

    `config` defaults to the process environment. Passing `reader` replaces the
    web3 binding for both handlers, which is how the tests run offline.
    """
    flask_app = Flask(__name__)
    cfg = config or Config.from_env()
    metadata_handler = metadata.MetadataHandler(cfg, reader)
    image_handler = image.ImageHandler(cfg, reader)

    @flask_app.route('/api/metadata/', defaults={'token_id': ''}, methods=['GET', 'OPTIONS'])
    @flask_app.route('/api/metadata/<path:token_id>', methods=['GET', 'OPTIONS'])
    def api_metadata(token_id):
        if request.method == 'OPTIONS':
            return make_response(preflight_response())
        return make_response(metadata_handler(token_id, request.host_url))

    @flask_app.route('/api/image/', defaults={'token_id': ''}, methods=['GET', 'OPTIONS'])
    @flask_app.route('/api/image/<path:token_id>', methods=['GET', 'OPTIONS'])
    def api_image(token_id):
        if request.method == 'OPTIONS':
            return make_response(preflight_response())
        return make_response(image_handler(token_id))

    @flask_app.route('/health', methods=['GET', 'OPTIONS'])
    @flask_app.route('/api/health', methods=['GET', 'OPTIONS'])
    def api_health():
        return make_response(ping.handler(request))

    flask_app.logger.info(
        "Serving contract %s via %s", cfg.contract_address or '<unset>', cfg.rpc_url
    )
    return flask_app


app = create_app()
