"""Parse application log lines and ship them as GELF messages over UDP."""
