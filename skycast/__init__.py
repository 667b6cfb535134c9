# ABOUTME: skycast resolves a place name or device position into a normalized weather snapshot.
# ABOUTME: Public entry points are WeatherSession (skycast.session) and load_settings (skycast.config).
