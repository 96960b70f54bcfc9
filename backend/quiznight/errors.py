"""Errors surfaced to the connection that caused them.

Authorization failures and stale operations are not represented here: they
are dropped and logged, never reported back to a client.
"""


class QuizNightError(Exception):
    code = 'error'
    message = 'Something went wrong.'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {'code': self.code, 'message': self.message}


class RoomNotFound(QuizNightError):
    code = 'room-not-found'
    message = 'Room not found.'


class InvalidName(QuizNightError):
    code = 'invalid-name'
    message = 'Please enter a name.'


class NameTaken(QuizNightError):
    code = 'name-taken'
    message = 'Name already taken in this room.'


class AlreadyJoined(QuizNightError):
    code = 'already-joined'
    message = 'This connection already belongs to a room.'


class InvalidQuiz(QuizNightError):
    code = 'invalid-quiz'
    message = 'Quiz document is invalid.'
