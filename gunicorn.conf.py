# use in gunicorn as: env/bin/gunicorn mavenhost.api:app -c gunicorn.conf.py
# Index markers and the work queue are per process unless Elasticsearch is configured,
# and pending work is drained when a worker shuts down.

# Workers
workers = 2
worker_class = 'uvicorn.workers.UvicornWorker'

# Socket
bind = 'localhost:5001'

# Logging
# loglevel = 'debug'
# accesslog = '/tmp/mavenhost_access_log'
# errorlog =  '/tmp/mavenhost_error_log'
