# Preload so fonts register once in the master before workers fork
preload_app = True

# Rendering is CPU bound; scale with workers rather than threads
workers = 2

# Bind
bind = "0.0.0.0:8080"

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"

# Large PNG exports can take a few seconds
timeout = 120
