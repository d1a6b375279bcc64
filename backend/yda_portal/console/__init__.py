"""
Admin screen controllers.

Front-end agnostic pieces that an admin screen is assembled from: the session
guard, realtime list sync, toasts, bilingual form fields and the media
uploader. Collaborators are injected through the protocols in ``gateways``.
"""
