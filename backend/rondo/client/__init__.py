"""Client side of the match protocol.

``ClientSession`` mirrors the server's turn/timer state for one player and
owns that player's letter queue. It only talks to the network through a
``send(event, payload)`` callable, so it can be driven by a real Socket.IO
client (see ``transport``) or by tests.
"""

from .answers import accepted_answers, is_correct, normalize
from .session import ALPHABET, ClientSession

__all__ = ['ALPHABET', 'ClientSession', 'accepted_answers', 'is_correct', 'normalize']
