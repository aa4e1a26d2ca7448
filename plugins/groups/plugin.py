"""
Group Management - inspect and edit permission groups from Slack.

Mention routes:
- "my groups"                        list the caller's groups (anyone)
- "list groups"                      list every group (admins)
- "add <@U123> to group deployers"   add a member (admins)
- "remove <@U123> from group ops"    remove a member (admins)
"""

import logging

from gadget.messaging import add_reaction, post_message
from gadget.models import WILDCARD_PERMISSION, MentionRoute

logger = logging.getLogger(__name__)

PLUGIN_NAME = "groups"
ADMIN_PERMISSIONS = ("admins",)


def format_group_list(groups) -> str:
    return "".join(f"*-* {group.name}\n" for group in groups)


def list_my_groups(ctx, event, message):
    post_message(ctx.client, event.channel, PLUGIN_NAME, f"Here are your groups, <@{event.user}>:")

    user = ctx.user or ctx.store.find_or_create_user(event.user)
    groups = ctx.store.groups_of(user)

    if groups:
        response = format_group_list(groups)
    else:
        response = "You don't seem to be a member of _any_ groups. Bummer."

    post_message(ctx.client, event.channel, PLUGIN_NAME, response)


def list_all_groups(ctx, event, message):
    post_message(ctx.client, event.channel, PLUGIN_NAME, "Here are *all* the groups I know about:")

    groups = ctx.store.all_groups()
    response = format_group_list(groups) or "I don't know about any groups yet."

    post_message(ctx.client, event.channel, PLUGIN_NAME, response)


def add_user_to_group(ctx, event, message):
    add_reaction(ctx.client, event.channel, PLUGIN_NAME, "tada", event.ts)

    user_name = ctx.match.group(1)
    group_name = ctx.match.group(3)

    group = ctx.store.find_or_create_group(group_name)
    user = ctx.store.find_or_create_user(user_name)
    ctx.store.add_member(group, user)
    logger.info(f"{event.user} added {user_name} to {group_name}")

    post_message(
        ctx.client,
        event.channel,
        PLUGIN_NAME,
        f"I successfully added <@{user_name}> to {group_name}!",
    )


def remove_user_from_group(ctx, event, message):
    add_reaction(ctx.client, event.channel, PLUGIN_NAME, "slightly_frowning_face", event.ts)

    user_name = ctx.match.group(1)
    group_name = ctx.match.group(3)

    user = ctx.store.find_or_create_user(user_name)
    group = ctx.store.find_group(group_name)

    if group is None:
        response = f"I couldn't find a group named '{group_name}'."
    elif ctx.store.remove_member(group, user):
        logger.info(f"{event.user} removed {user_name} from {group_name}")
        response = f"<@{user_name}> is no longer a member of {group_name}!"
    else:
        response = f"It doesn't look like <@{user_name}> is a member of {group_name}."

    post_message(ctx.client, event.channel, PLUGIN_NAME, response)


def get_routes() -> list[MentionRoute]:
    return [
        MentionRoute(
            name="groups.getMyGroups",
            pattern=r"(?i)^((list )?my groups|which groups am I (in|a member of))[.?]?$",
            description="Lists the groups you belong to",
            help="my groups",
            permissions=(WILDCARD_PERMISSION,),
            handler=list_my_groups,
        ),
        MentionRoute(
            name="groups.getAllGroups",
            pattern=r"(?i)^(list|list all|all) groups\.?$",
            description="Lists every known group",
            help="list groups",
            permissions=ADMIN_PERMISSIONS,
            handler=list_all_groups,
        ),
        MentionRoute(
            name="groups.addUserToGroup",
            pattern=r"(?i)^add <@([a-z0-9]+)> to( group)? ([a-z0-9]+)\.?$",
            description="Adds a user to a group",
            help="add @user to group GROUP",
            permissions=ADMIN_PERMISSIONS,
            handler=add_user_to_group,
        ),
        MentionRoute(
            name="groups.removeUserFromGroup",
            pattern=r"(?i)^remove <@([a-z0-9]+)> from( group)? ([a-z0-9]+)\.?$",
            description="Removes a user from a group",
            help="remove @user from group GROUP",
            permissions=ADMIN_PERMISSIONS,
            handler=remove_user_from_group,
        ),
    ]
