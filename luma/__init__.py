import logging

from flask import Flask, current_app, jsonify
from flask_wtf.csrf import CSRFError, CSRFProtect, generate_csrf

from config import Config
from luma.errors import MalformedInput, RemoteUnavailable

csrf = CSRFProtect()
logger = logging.getLogger(__name__)


def get_store():
    return current_app.extensions['luma']['store']


def get_ideas():
    return current_app.extensions['luma']['ideas']


def _build_backends(app):
    from luma.cache import CachePolicy, LocalCache
    from luma.persistence import RemoteAdapter

    enabled = app.config.get('REMOTE_ENABLED', True)
    if enabled:
        from luma.firebase_init import init_firebase
        init_firebase(app.config)
    remote = RemoteAdapter(timeout=app.config.get('REMOTE_TIMEOUT_SECONDS'), enabled=enabled)
    cache = LocalCache.from_url(
        app.config['LOCAL_CACHE_URL'],
        prefix=app.config.get('LOCAL_CACHE_PREFIX', 'luma'),
        capacity_bytes=app.config['LOCAL_CACHE_CAPACITY_BYTES'],
    )
    return remote, cache, CachePolicy.from_config(app.config)


def create_app(config_class=Config, store=None, ideas=None):
    """Application factory.

    ``store`` and ``ideas`` may be passed in pre-built (tests do); otherwise
    they are wired to Firestore and the Redis cache from the config and
    loaded before the first request.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    from luma.logging_config import configure_logging
    configure_logging(app.config.get('LOG_LEVEL', 'INFO'))

    csrf.init_app(app)

    if store is None or ideas is None:
        from luma.ideas import IdeaBacklog
        from luma.store import ContentStore

        remote, cache, policy = _build_backends(app)
        if store is None:
            store = ContentStore(remote=remote, cache=cache, policy=policy)
            store.load()
        if ideas is None:
            ideas = IdeaBacklog(remote=remote, cache=cache)
            ideas.load()
    app.extensions['luma'] = {'store': store, 'ideas': ideas}

    from luma.decorators import load_current_user

    @app.before_request
    def before_request():
        load_current_user()

    # Register blueprints
    from luma.routes import hierarchy, ideas as ideas_routes, review, units
    app.register_blueprint(hierarchy.bp)
    app.register_blueprint(units.bp)
    app.register_blueprint(ideas_routes.bp)
    app.register_blueprint(review.bp)

    @app.route('/api/csrf-token')
    def csrf_token():
        return jsonify({'csrfToken': generate_csrf()})

    _register_error_handlers(app)
    return app


def _register_error_handlers(app):
    @app.errorhandler(MalformedInput)
    def malformed_input(exc):
        return jsonify({'error': 'invalid input', 'errors': exc.errors}), 400

    @app.errorhandler(CSRFError)
    def csrf_error(exc):
        return jsonify({'error': exc.description}), 400

    @app.errorhandler(RemoteUnavailable)
    def remote_unavailable(exc):
        logger.warning('request failed on remote dependency: %s', exc)
        return jsonify({'error': 'remote storage unavailable'}), 502

    @app.errorhandler(404)
    def not_found(exc):
        return jsonify({'error': 'not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(exc):
        return jsonify({'error': 'method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(exc):
        logger.exception('unhandled error')
        return jsonify({'error': 'internal server error'}), 500
