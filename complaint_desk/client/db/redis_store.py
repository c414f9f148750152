from redis import Redis

import complaint_desk.config.config as configs


def build_redis_client() -> Redis:
    return Redis(host=configs.REDIS_HOST, port=configs.REDIS_PORT, decode_responses=True)


redis_client = build_redis_client() if configs.REAPER_LOCK_ENABLED else None
