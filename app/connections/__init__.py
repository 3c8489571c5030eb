from app.connections.http import http_lifespan, get_http_client
from app.connections.mongo import mongo_lifespan
from app.connections.redis import redis_lifespan, get_redis

__all__ = ["http_lifespan", "get_http_client", "mongo_lifespan", "redis_lifespan", "get_redis"]
