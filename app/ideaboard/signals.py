"""
Component notifications.

Listeners re-render or react to these without the emitting view knowing
about them (the notification fan-out subscribes to ``idea_status_changed``).
All signals are sent with the Flask app as sender.
"""
from blinker import Namespace

_signals = Namespace()

idea_created = _signals.signal("idea-created")
idea_deleted = _signals.signal("idea-deleted")
idea_status_changed = _signals.signal("idea-status-changed")
vote_toggled = _signals.signal("vote-toggled")
comment_created = _signals.signal("comment-created")
comment_updated = _signals.signal("comment-updated")
