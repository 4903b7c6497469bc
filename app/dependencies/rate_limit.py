from fastapi_limiter.depends import RateLimiter

# Shared limiter instances so tests can override them by identity
listing_limiter = RateLimiter(times=30, seconds=60)
detail_limiter = RateLimiter(times=60, seconds=60)
map_limiter = RateLimiter(times=30, seconds=60)
upload_limiter = RateLimiter(times=5, seconds=60)
write_limiter = RateLimiter(times=10, seconds=60)

ALL_LIMITERS = (listing_limiter, detail_limiter, map_limiter, upload_limiter, write_limiter)
