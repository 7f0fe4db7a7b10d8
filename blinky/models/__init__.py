from .user import User
from .otp import Otp
from .device_session import DeviceSession
from .link import Link
