from pymongo.database import Database
from pymongo import MongoClient
import redis.asyncio as aioredis
from fastapi import Request
from redis.asyncio import Redis

from lms.config import Settings
from lms.services.cloudinary_host import CloudinaryMediaHost
from lms.services.stripe_gateway import StripePaymentGateway


def create_mongo_client(uri: str) -> MongoClient:
    # synchronous PyMongo client (use run_in_threadpool for blocking calls)
    return MongoClient(uri, maxPoolSize=100, serverSelectionTimeoutMS=5000)

def create_redis_client(url: str):
    # redis.asyncio client (async)
    return aioredis.from_url(url, encoding="utf-8", decode_responses=True)

def create_media_host(settings: Settings) -> CloudinaryMediaHost:
    return CloudinaryMediaHost(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
    )

def create_payment_gateway(settings: Settings) -> StripePaymentGateway:
    return StripePaymentGateway(api_key=settings.STRIPE_SECRET_KEY)

def get_db(request: Request) -> Database:
    return request.app.state.db

def get_redis(request: Request) -> Redis:
    return request.app.state.redis

def get_media_host(request: Request) -> CloudinaryMediaHost:
    return request.app.state.media_host

def get_payment_gateway(request: Request) -> StripePaymentGateway:
    return request.app.state.payment_gateway
