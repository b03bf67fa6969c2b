"""Core global settings definitions."""

from deploystack.global_settings.types import (
    GlobalSettingDefinition,
    GlobalSettingGroup,
    GlobalSettingsModule,
)

GLOBAL_SETTINGS = GlobalSettingsModule(
    group=GlobalSettingGroup(
        id="global",
        name="Global Settings",
        description="General application configuration settings",
        icon="settings",
        sort_order=0,
    ),
    settings=[
        GlobalSettingDefinition(
            key="global.page_url",
            default_value="http://localhost:5173",
            description="Base URL for the application frontend",
        ),
        GlobalSettingDefinition(
            key="global.send_mail",
            default_value="false",
            description="Enable or disable email sending functionality",
        ),
    ],
)

SMTP_SETTINGS = GlobalSettingsModule(
    group=GlobalSettingGroup(
        id="smtp",
        name="SMTP Mail Settings",
        description="Outgoing mail server configuration",
        icon="mail",
        sort_order=1,
    ),
    settings=[
        GlobalSettingDefinition(
            key="smtp.host",
            description="SMTP server hostname (e.g., smtp.gmail.com)",
            required=True,
        ),
        GlobalSettingDefinition(
            key="smtp.port",
            default_value="587",
            description="SMTP server port (587 for TLS, 465 for SSL, 25 for unencrypted)",
            required=True,
        ),
        GlobalSettingDefinition(
            key="smtp.username",
            description="SMTP authentication username",
            required=True,
        ),
        GlobalSettingDefinition(
            key="smtp.password",
            description="SMTP authentication password",
            encrypted=True,
            required=True,
        ),
        GlobalSettingDefinition(
            key="smtp.secure",
            default_value="true",
            description="Use SSL/TLS for SMTP connection (true/false)",
        ),
        GlobalSettingDefinition(
            key="smtp.from_name",
            default_value="DeployStack",
            description="Default sender name for emails",
        ),
        GlobalSettingDefinition(
            key="smtp.from_email",
            description="Default sender email address",
        ),
    ],
)

GITHUB_OAUTH_SETTINGS = GlobalSettingsModule(
    group=GlobalSettingGroup(
        id="github-oauth",
        name="GitHub OAuth",
        description="Sign in with GitHub",
        icon="github",
        sort_order=2,
    ),
    settings=[
        GlobalSettingDefinition(
            key="github.oauth.client_id",
            description="GitHub OAuth application client ID",
        ),
        GlobalSettingDefinition(
            key="github.oauth.client_secret",
            description="GitHub OAuth application client secret",
            encrypted=True,
        ),
        GlobalSettingDefinition(
            key="github.oauth.enabled",
            default_value="false",
            description="Enable GitHub OAuth authentication (true/false)",
        ),
        GlobalSettingDefinition(
            key="github.oauth.callback_url",
            default_value="http://localhost:3000/api/auth/github/callback",
            description="GitHub OAuth callback URL",
        ),
        GlobalSettingDefinition(
            key="github.oauth.scope",
            default_value="user:email",
            description="GitHub OAuth requested scopes",
        ),
    ],
)

CORE_SETTINGS_MODULES = [GLOBAL_SETTINGS, SMTP_SETTINGS, GITHUB_OAUTH_SETTINGS]
