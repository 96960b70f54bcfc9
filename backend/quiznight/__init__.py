import json

import click
from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Session state lives on the app, one registry per app instance
    from quiznight.services.quiz.registry import RoomRegistry
    from quiznight.services.quiz.scheduler import QuestionTimer
    from quiznight.services.quiz.session import SessionController
    from quiznight.socketio_events import SocketBroadcaster, register_socketio_handlers

    registry = RoomRegistry(
        alphabet=flask_app.config['ROOM_CODE_ALPHABET'],
        code_length=int(flask_app.config['ROOM_CODE_LENGTH']),
        default_title=flask_app.config['DEFAULT_QUIZ_TITLE'],
    )
    timer = QuestionTimer(
        spawn=socketio.start_background_task,
        sleep=socketio.sleep,
        logger=flask_app.logger,
        heartbeat_sec=int(flask_app.config.get('TIMER_HEARTBEAT_SEC', 0)),
        # No background timers in tests unless explicitly requested
        enabled=not flask_app.config.get('TESTING') or bool(flask_app.config.get('ENABLE_TIMERS_IN_TESTS')),
    )
    flask_app.extensions['quiz_session'] = SessionController(
        registry, SocketBroadcaster(socketio), timer, logger=flask_app.logger
    )

    from quiznight.main import main
    flask_app.register_blueprint(main)

    register_socketio_handlers()

    @click.command('quiz-check')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    def quiz_check_command(path):
        """Validate a quiz JSON file before hosting it."""
        from quiznight.errors import InvalidQuiz
        from quiznight.services.quiz.document import parse_quiz

        with open(path, encoding='utf-8') as fh:
            try:
                document = json.load(fh)
            except json.JSONDecodeError as exc:
                raise click.ClickException(f'Invalid JSON: {exc}')
        try:
            quiz = parse_quiz(document, default_title=flask_app.config['DEFAULT_QUIZ_TITLE'])
        except InvalidQuiz as exc:
            raise click.ClickException(exc.message)
        click.echo(f'OK: {quiz.title} ({len(quiz.questions)} questions)')

    flask_app.cli.add_command(quiz_check_command)

    return flask_app
