from api._shared import (
    IMMUTABLE_CACHE_CONTROL,
    Config,
    json_response,
    logger,
    parse_token_id,
    preflight_response,
    request_root,
    request_token_id,
)
from api.contract import ContractReadError, ContractReader, Web3ContractReader

NFT_NAME_PREFIX = 'Magic Base Ball #'
NFT_DESCRIPTION = 'A prophecy revealed by the Magic Base Ball. An on-chain fortune telling NFT on Base.'
EXTERNAL_URL = 'https://magicbaseball.xyz/nft/{token_id}'


class MetadataHandler:
    """
    Serves the NFT metadata JSON for one token.

    400 for a bad id, 404 when the prophecy is missing or the token is not
    minted, 500 for RPC failures. Only successful responses are cacheable.
    """

    def __init__(self, config: Config, reader: ContractReader | None = None):
        self.config = config
        self.reader = reader

    def _get_reader(self) -> ContractReader:
        if self.reader is not None:
            return self.reader
        return Web3ContractReader.from_config(self.config)

    def __call__(self, token_id, base_url: str | None = None):
        token_num = parse_token_id(token_id)
        if token_num is None:
            return json_response({'error': 'Invalid token ID'}, 400)
        token_text = str(token_id).strip()

        try:
            reader = self._get_reader()

            try:
                prophecy = reader.get_prophecy(token_num)
            except ContractReadError:
                raise
            except Exception as e:  # noqa: BLE001
                logger.info("Prophecy %s not found: %s", token_text, e)
                return json_response({'error': 'Token not found'}, 404)

            try:
                reader.get_owner(token_num)
            except ContractReadError:
                raise
            except Exception as e:  # noqa: BLE001
                logger.info("Token %s not minted: %s", token_text, e)
                return json_response({'error': 'Token not minted yet'}, 404)

            question, answer, timestamp = prophecy
            metadata = build_metadata(
                token_text, question, answer, timestamp,
                self.config.public_base_url(base_url),
            )
        except Exception as e:  # noqa: BLE001
            logger.exception("Metadata error for token %s", token_text)
            return json_response({'error': 'Failed to fetch metadata', 'details': str(e)}, 500)

        return json_response(metadata, 200, {'Cache-Control': IMMUTABLE_CACHE_CONTROL})


def build_metadata(token_id: str, question: str, answer: str, timestamp, image_base: str) -> dict:
    return {
        'name': f"{NFT_NAME_PREFIX}{token_id}",
        'description': NFT_DESCRIPTION,
        'image': f"{image_base}/api/image/{token_id}",
        'external_url': EXTERNAL_URL.format(token_id=token_id),
        'attributes': [
            {'trait_type': 'Question', 'value': question},
            {'trait_type': 'Answer', 'value': answer},
            {'trait_type': 'Mint Date', 'display_type': 'date', 'value': int(timestamp)},
            {'trait_type': 'Mint Number', 'value': token_id},
        ],
    }


# Per-file entry point in the style of api/ping.py; vercel.json routes
# deployed traffic through api.index instead.
def handler(request):
    if request.method == "OPTIONS":
        return preflight_response()
    metadata_handler = MetadataHandler(Config.from_env())
    return metadata_handler(request_token_id(request), request_root(request))
