"""eniqilo-store back-office core"""
