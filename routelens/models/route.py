"""
RouteLens — Route and Annotation Records
=========================================

What:  Immutable records produced by the resolution core.
How:   Frozen Pydantic models; instances compare structurally and cannot be
       mutated after construction, so cached sequences can be shared freely.
Who:   Route is produced by the route table parser and cached by RouteIndex.
       Annotation is produced and cached by AnnotationResolver.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

# Command id the editor host binds to "open this file"
OPEN_VIEW_COMMAND = "routelens.openView"


class Route(BaseModel):
    """
    One row of the application's routing table.

    Field naming follows the dump columns as they are read, not the header
    Rails prints: a row is ``[name, verb, url, pattern, controller#action]``
    and rows without a name column shift left by one.
    """
    verb: str = Field(default="", description="HTTP verb column; empty when absent")
    url: str = Field(description="URL column (may contain :param placeholders)")
    pattern: str = Field(description="Route pattern / name column")
    controller: str = Field(description="Controller path as printed, e.g. admin/posts")
    action: str = Field(description="Action name as printed")

    model_config = {"frozen": True}

    def matches(self, controller: str, action: str) -> bool:
        """Case-insensitive comparison of both controller and action."""
        return (
            self.controller.lower() == controller.lower()
            and self.action.lower() == action.lower()
        )


class Annotation(BaseModel):
    """
    What:  Inline label attached to one `def <action>` line of a controller.
    How:   `title` is always present; `command` and `arguments` are only set
           when a view file exists, making the label clickable.

    Lines are 0-based, matching editor range coordinates.
    """
    line: int = Field(ge=0, description="0-based line of the action definition")
    title: str = Field(description="Display label: url | pattern | verb")
    route: Route
    view_path: Optional[str] = Field(default=None, description="Resolved view file, if any")
    command: Optional[str] = Field(default=None, description="Host command to run on click")
    arguments: List[str] = Field(default_factory=list)
    tooltip: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def for_route(
        cls,
        line: int,
        route: Route,
        view_path: str = "",
        controller: Optional[str] = None,
        action: Optional[str] = None,
    ) -> "Annotation":
        """
        Builds the annotation for a matched line; `view_path` "" means no view.

        `controller` and `action` name the target as the document spells it
        (controller from the file path, action from the `def` line); they
        default to the route's own spelling.
        """
        title = f"🌐 {route.url} | {route.pattern} | {route.verb}"
        controller = controller or route.controller
        action = action or route.action
        if not view_path:
            return cls(line=line, title=title, route=route)
        return cls(
            line=line,
            title=f"{title} 👁️",
            route=route,
            view_path=view_path,
            command=OPEN_VIEW_COMMAND,
            arguments=[view_path],
            tooltip=f"navigate to view: {controller}#{action}",
        )

    @property
    def navigable(self) -> bool:
        return self.view_path is not None
