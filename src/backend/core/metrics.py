"""
Prometheus metrics for authentication, telemetry and device control.

Usage:
    from core.metrics import track_auth_attempt, track_pump_command

    track_auth_attempt(method="password", status="success")
    track_pump_command(command="TOGGLE", source="api", status="success")
"""

from prometheus_client import Counter, Gauge, Histogram

# ==============================================================================
# Business Metrics - User Authentication
# ==============================================================================

auth_attempts_total = Counter(
    'vegobolt_auth_attempts_total',
    'Total authentication attempts',
    ['method', 'status']  # method: password/google, status: success/failure reason
)

registrations_total = Counter(
    'vegobolt_registrations_total',
    'Total successful account registrations',
)

# ==============================================================================
# Telemetry Metrics
# ==============================================================================

tank_readings_total = Counter(
    'vegobolt_tank_readings_total',
    'Total tank readings recorded',
    ['status']
)

tank_level_percent = Gauge(
    'vegobolt_tank_level_percent',
    'Tank level from the most recent reading',
)

tank_temperature_celsius = Gauge(
    'vegobolt_tank_temperature_celsius',
    'Tank temperature from the most recent reading',
)

# ==============================================================================
# Device Control Metrics
# ==============================================================================

pump_commands_total = Counter(
    'vegobolt_pump_commands_total',
    'Total pump commands issued to the smart plug',
    ['command', 'source', 'status']
)

pump_command_duration_seconds = Histogram(
    'vegobolt_pump_command_duration_seconds',
    'Smart plug round-trip time per command',
    ['command'],
    buckets=(0.1, 0.25, 0.5, 1, 2, 5, 10, float('inf'))
)

mqtt_messages_received_total = Counter(
    'vegobolt_mqtt_messages_received_total',
    'MQTT messages received by the bridge',
    ['topic']
)

mqtt_messages_published_total = Counter(
    'vegobolt_mqtt_messages_published_total',
    'MQTT messages published by the bridge',
    ['topic', 'status']
)

mqtt_connected = Gauge(
    'vegobolt_mqtt_connected',
    'Whether the MQTT bridge currently holds a broker connection (1/0)',
)


def track_auth_attempt(method: str, status: str):
    """Track an authentication attempt."""
    auth_attempts_total.labels(method=method, status=status).inc()


def track_reading(status: str, level: float, temperature: float):
    """Track a stored tank reading."""
    tank_readings_total.labels(status=status).inc()
    tank_level_percent.set(level)
    tank_temperature_celsius.set(temperature)


def track_pump_command(command: str, source: str, status: str, duration_seconds: float = None):
    """Track a pump command and, when known, its round-trip time."""
    pump_commands_total.labels(command=command, source=source, status=status).inc()
    if duration_seconds is not None:
        pump_command_duration_seconds.labels(command=command).observe(duration_seconds)


def track_mqtt_received(topic: str):
    mqtt_messages_received_total.labels(topic=topic).inc()


def track_mqtt_published(topic: str, success: bool):
    mqtt_messages_published_total.labels(
        topic=topic, status="success" if success else "failure"
    ).inc()
