# SERVICE CONFIGURATION

# Address the AES key-handle API binds to
HOST = "0.0.0.0"
PORT = 5000

# Where client.py expects a running node
NODE_URL = "http://127.0.0.1:5000"
REQUEST_TIMEOUT = 10 # seconds

# CIPHER DEFAULTS
KEY_LENGTH_BITS = 256 # 128, 192 or 256
MODE = "cbc"          # "cbc" or "ctr"
