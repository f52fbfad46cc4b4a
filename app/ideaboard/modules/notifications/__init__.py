"""
Outbound notifications.

- mailer: SMTP / console / in-memory mail backends
- queue: out-of-band dispatch (thread pool or inline)
- service: the notify-all-voters fan-out job
"""
