from django.conf import settings
from rest_framework.permissions import BasePermission


def plugin_enabled(plugin_name):
    return plugin_name in getattr(settings, 'BACKOFFICE_PLUGINS', [])


def PluginEnabled(plugin_name):
    """
    Build a permission class that only admits requests while ``plugin_name``
    is listed in BACKOFFICE_PLUGINS.
    """

    class _PluginEnabled(BasePermission):
        message = f'Plugin "{plugin_name}" is not enabled.'

        def has_permission(self, request, view):
            return plugin_enabled(plugin_name)

    _PluginEnabled.__name__ = f'PluginEnabled[{plugin_name}]'
    return _PluginEnabled
