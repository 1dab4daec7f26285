"""
Job Portal
Backend for a job and internship portal.

Architecture:
- MongoDB: users (credentials, profile, applied jobs) and jobs
- JWT: short-lived access token + rotating refresh token, one session per user
- Cloudinary: image hosting for profile and cover images
"""

__version__ = "1.0.0"
