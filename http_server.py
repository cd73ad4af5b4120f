# coding: utf-8

import argparse
import logging
import os
import re
import socket
import sys

from flask import Blueprint, Flask, Response, request
from werkzeug.serving import make_server

from leibniz import estimate

# configure logger output format
logging.basicConfig(level=logging.INFO,format='%(asctime)s %(name)-12s %(levelname)-8s %(message)s',datefmt='%m-%d %H:%M:%S')
logger = logging.getLogger('Pi Calculator')


DEFAULT_HOST = '0.0.0.0'
DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = 'INFO'

INVALID_ITERATIONS = 'iterations parameter not valid\n'

# base-10 integer with an optional sign, no whitespace or underscores
_INTEGER = re.compile(r'[+-]?[0-9]+')
_INT64_MIN = -2 ** 63
_INT64_MAX = 2 ** 63 - 1


class PiCalcError(Exception):
    pass


class InvalidParameter(PiCalcError, ValueError):
    pass


class ConfigError(PiCalcError, ValueError):
    pass


class ServerStartupFailure(PiCalcError):
    pass


class ServerConfig:
    """Settings resolved once at startup and handed to the app and the server.

    The environment is only read by ``from_env``; request handling never looks
    at it.
    """

    def __init__(self, host=DEFAULT_HOST, port=DEFAULT_PORT, log_level=DEFAULT_LOG_LEVEL):
        self.host = host
        self.port = _check_port(port)
        self.log_level = _check_log_level(log_level)

    @classmethod
    def from_env(cls, environ=None):
        if environ is None:
            environ = os.environ
        return cls(
            host=environ.get('HOST') or DEFAULT_HOST,
            port=environ.get('PORT') or DEFAULT_PORT,
            log_level=environ.get('LOG_LEVEL') or DEFAULT_LOG_LEVEL,
        )

    def override(self, host=None, port=None, log_level=None):
        return ServerConfig(
            host=host or self.host,
            port=self.port if port is None else port,
            log_level=log_level or self.log_level,
        )

    def __repr__(self):
        return 'ServerConfig(host={!r}, port={!r}, log_level={!r})'.format(self.host, self.port, self.log_level)


def _check_port(port):
    try:
        value = int(port)
    except (TypeError, ValueError):
        raise ConfigError('port is not an integer: {!r}'.format(port))
    if not 0 < value < 65536:
        raise ConfigError('port out of range: {}'.format(value))
    return value


def _check_log_level(name):
    level = getattr(logging, str(name).upper(), None)
    if not isinstance(level, int):
        raise ConfigError('unknown log level: {!r}'.format(name))
    return str(name).upper()


def parse_iterations(raw):
    if raw is None or not _INTEGER.fullmatch(raw):
        raise InvalidParameter('iterations parameter not valid: {!r}'.format(raw))
    iterations = int(raw)
    if not _INT64_MIN <= iterations <= _INT64_MAX:
        raise InvalidParameter('iterations parameter out of range: {!r}'.format(raw))
    return iterations


def _text(body):
    return Response(body, mimetype='text/plain')


picalc = Blueprint('picalc', __name__)


@picalc.route('/picalc', methods=['GET'])
@picalc.route('/', methods=['GET'])
def index():
    logger.info('Pi calculator received a request.')
    raw = request.args.get('iterations')
    try:
        iterations = parse_iterations(raw)
    except InvalidParameter:
        logger.debug('Rejected iterations value %r', raw)
        return _text(INVALID_ITERATIONS)
    return _text('%.10f\n' % estimate(iterations))


def create_app(config=None):
    app = Flask(__name__)
    app.config['SERVER_CONFIG'] = config or ServerConfig()
    app.register_blueprint(picalc)
    return app


def serve(app):
    config = app.config['SERVER_CONFIG']
    family = socket.AF_INET6 if ':' in config.host else socket.AF_INET
    logger.info('Listening on %s %s', config.host, config.port)
    # werkzeug exits on its own bind errors, so the socket is opened here
    try:
        sock = socket.create_server((config.host, config.port), family=family)
    except OSError as err:
        raise ServerStartupFailure('cannot listen on {} {}: {}'.format(config.host, config.port, err)) from err
    with sock:
        server = make_server(config.host, config.port, app, threaded=True, fd=sock.fileno())
        server.serve_forever()


def main(argv=None):
    parser = argparse.ArgumentParser(description='Pi HTTP server')
    parser.add_argument('-p', '--port', dest='port', type=int, help='HTTP port (default: $PORT or 8080)')
    parser.add_argument('-H', '--host', dest='host', help='bind address (default: $HOST or 0.0.0.0)')
    parser.add_argument('--log-level', dest='log_level', help='logging level (default: $LOG_LEVEL or INFO)')
    args = parser.parse_args(argv)

    try:
        config = ServerConfig.from_env().override(host=args.host, port=args.port, log_level=args.log_level)
    except ConfigError as err:
        parser.error(str(err))

    logging.getLogger().setLevel(config.log_level)
    logger.info('Pi calculator started.')

    try:
        serve(create_app(config))
    except ServerStartupFailure as err:
        logger.error(err)
        sys.exit(1)


if __name__ == '__main__':
    main()
