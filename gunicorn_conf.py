import os

host = os.getenv("HOST", "0.0.0.0")
port = os.getenv("PORT", "5010")
bind = f"{host}:{port}"

# Tide extremes are cached in process memory, so extra workers each keep their own copy
workers = int(os.getenv("WEB_CONCURRENCY", "2"))
worker_class = "uvicorn.workers.UvicornWorker"
keepalive = 30
# Bundle requests wait on upstream timeouts of at most a few seconds each
timeout = int(os.getenv("TIMEOUT", "60"))
graceful_timeout = 20

loglevel = os.getenv("LOG_LEVEL", "info")
errorlog = "-"
accesslog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(L)ss "%(a)s"'

def post_fork(server, worker):
    """Expose the worker pid to the app's log lines."""
    os.environ["WORKER_ID"] = str(worker.pid)
