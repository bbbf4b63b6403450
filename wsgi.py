"""
WSGI entry point

    gunicorn -w 1 -k gthread --threads 8 wsgi:app

The submissions stream occupies a thread per open inbox page, so run a
threaded worker. The change feed lives in one process: with several
workers, the stream only sees submissions saved by its own worker.
"""

import os
from app import create_app

app = create_app()

if __name__ == '__main__':
    env = os.environ.get('FLASK_ENV', 'development')
    app.run(
        host='0.0.0.0',
        port=int(os.environ.get('PORT', 5000)),
        debug=(env == 'development')
    )
