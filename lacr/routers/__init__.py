"""
Routers module - API endpoint handlers organized by feature.

Each router handles a specific domain of the API:
- esp32: Device self-registration, authentication, heartbeat and commands
- robots: Owner-side robot management (register, claim, passwords, GEM status)
- auth: Firebase token verification and dashboard lock
- users: User profile
- status: Service status and uptime
- alarms: Per-device alarm clock
- heartbeat: Heart-rate readings and monitoring sessions
- chat: Assistant conversation log (mounted under /gemini)
- settings: General device settings, reset and firmware
- led: Lamp settings, control and presets
- buzzer: Sound settings, playback and custom patterns
- wifi: Network configuration reported by the robot
- tasks: Per-device to-do list
"""
