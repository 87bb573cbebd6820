"""Gateway watchdog - health monitoring and auto-recovery for a long-running gateway.

Probes the gateway on a fixed interval, tracks consecutive failures, sends
de-duplicated alerts to Rocket.Chat (or the local log), and restarts the
gateway once failures cross a threshold, subject to a cooldown.
"""

__version__ = "0.1.0"
