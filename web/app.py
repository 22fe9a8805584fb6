"""
Web Interface for JSON Comparison
"""

import os
import sys
import secrets
import threading
import uuid
from collections import OrderedDict
from pathlib import Path
from typing import Optional
import logging

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from flask import Flask, Response, current_app, jsonify, render_template, request, session
from core.compare_session import CompareSession
from core.json_normalizer import ParseError
from core.line_diff import EMPTY_RESULT
from comparator.report_builder import render_display

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_MAX_CONTENT_LENGTH = 16 * 1024 * 1024
DEFAULT_MAX_SESSIONS = 1000
SESSION_KEY = 'compare_session_id'
EXTENSION_KEY = 'json_compare'


class SessionRegistry:
    """Holds one CompareSession per browser session id.

    At most ``max_sessions`` are kept; the least recently used one is
    evicted when a new session would exceed the cap.
    """

    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.max_sessions = max_sessions
        self._sessions = OrderedDict()
        self._lock = threading.Lock()

    def get(self, session_id: str, create: bool = True) -> Optional[CompareSession]:
        with self._lock:
            compare_session = self._sessions.get(session_id)
            if compare_session is not None:
                self._sessions.move_to_end(session_id)
                return compare_session
            if not create:
                return None
            compare_session = CompareSession()
            self._sessions[session_id] = compare_session
            while len(self._sessions) > self.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info(f"Evicted least recently used compare session {evicted_id}")
            return compare_session

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def __len__(self):
        with self._lock:
            return len(self._sessions)


def load_config_from_env():
    """Read settings from the environment, falling back to defaults."""
    return {
        'SECRET_KEY': os.environ.get('JSON_COMPARE_SECRET_KEY') or secrets.token_hex(32),
        'MAX_CONTENT_LENGTH': int(os.environ.get('JSON_COMPARE_MAX_CONTENT_LENGTH', DEFAULT_MAX_CONTENT_LENGTH)),
        'DEBUG': os.environ.get('JSON_COMPARE_DEBUG', '0').lower() in ('1', 'true', 'yes'),
        'MAX_SESSIONS': int(os.environ.get('JSON_COMPARE_MAX_SESSIONS', DEFAULT_MAX_SESSIONS)),
    }


def current_compare_session(create: bool = True) -> CompareSession:
    """Return the caller's CompareSession.

    With ``create=False`` a caller without a stored session gets a fresh,
    unregistered one, so read-only requests never grow the registry.
    """
    registry = current_app.extensions[EXTENSION_KEY]
    session_id = session.get(SESSION_KEY)
    if session_id is not None:
        compare_session = registry.get(session_id, create=create)
        if compare_session is not None:
            return compare_session
    if not create:
        return CompareSession()
    session_id = uuid.uuid4().hex
    session[SESSION_KEY] = session_id
    return registry.get(session_id)


def parse_error_response(error: ParseError):
    return jsonify(error.to_dict()), 400


def _string_fields(payload, *names):
    """Pull required string fields out of a JSON request body."""
    if not isinstance(payload, dict):
        raise ValueError('Request body must be a JSON object')
    values = []
    for name in names:
        value = payload.get(name)
        if not isinstance(value, str):
            raise ValueError(f"Field '{name}' is required and must be a string")
        values.append(value)
    return values


def create_app(config=None) -> Flask:
    app = Flask(__name__)
    app.config.update(load_config_from_env())
    if config:
        app.config.update(config)
    app.extensions[EXTENSION_KEY] = SessionRegistry(app.config['MAX_SESSIONS'])

    @app.route('/')
    def index():
        """Render the main page."""
        compare_session = current_compare_session(create=False)
        return render_template(
            'index.html',
            left_text=compare_session.left_text,
            right_text=compare_session.right_text,
            diff_markup=compare_session.rendered.display_markup,
        )

    @app.route('/normalize', methods=['POST'])
    def normalize_route():
        """Beautify one side of the comparison."""
        try:
            payload = request.get_json(silent=True)
            text, = _string_fields(payload, 'text')
            side = payload.get('side')
            if side not in (None, 'left', 'right'):
                return jsonify({'error': "Field 'side' must be 'left' or 'right'"}), 400
            canonical = current_compare_session(create=False).beautify(text, side=side)
            return jsonify({'success': True, 'side': side, 'text': canonical})
        except ParseError as e:
            return parse_error_response(e)
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        except Exception as e:
            logger.error(f"Error normalizing input: {str(e)}", exc_info=True)
            return jsonify({'error': str(e)}), 500

    @app.route('/compare', methods=['POST'])
    def compare_route():
        """Normalize both sides and return the rendered diff."""
        try:
            left, right = _string_fields(request.get_json(silent=True), 'left', 'right')
            compare_session = current_compare_session()
            rendered = compare_session.compare(left, right)
            result = compare_session.result.to_dict()
            return jsonify({
                'success': True,
                'left': compare_session.left_text,
                'right': compare_session.right_text,
                'display_markup': rendered.display_markup,
                'unified_text': rendered.unified_text,
                'similarity_score': result['similarity_score'],
                'summary': result['summary'],
            })
        except ParseError as e:
            error_body = e.to_dict()
            error_body['display_markup'] = current_compare_session().rendered.display_markup
            return jsonify(error_body), 400
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        except Exception as e:
            logger.error(f"Error comparing documents: {str(e)}", exc_info=True)
            return jsonify({'error': str(e)}), 500

    @app.route('/clear', methods=['POST'])
    def clear_route():
        session_id = session.pop(SESSION_KEY, None)
        if session_id is not None:
            current_app.extensions[EXTENSION_KEY].discard(session_id)
        return jsonify({'success': True, 'display_markup': render_display(EMPTY_RESULT)})

    @app.route('/diff.txt')
    def download_diff():
        """Return the last unified diff as plain text."""
        compare_session = current_compare_session(create=False)
        if not compare_session.has_diff:
            return jsonify({'error': 'No diff to copy'}), 404
        return Response(
            compare_session.rendered.unified_text,
            mimetype='text/plain',
            headers={'Content-Disposition': 'inline; filename=json_diff.txt'},
        )

    return app


if __name__ == '__main__':
    port = int(os.environ.get("PORT", 5000))
    app = create_app()
    app.run(host="0.0.0.0", port=port, debug=app.config['DEBUG'])
