# Device catalogue used for recommendations, prices and node tooltips.

ICON_BASE = "https://api.iconify.design/mdi:"

DEVICE_DATA = {
    "router": {
        "name": "Cisco ISR 4321 Router",
        "specs": "2-core CPU, 4 GB DRAM, 4 GB flash memory",
        "ports": "2x GE, 2x SFP",
        "image": ICON_BASE + "router-wireless.svg",
        "price": 2000,
    },
    "firewall": {
        "name": "Fortinet FortiGate 60F Next-Generation Firewall",
        "specs": "Dual-core CPU, 4 GB memory",
        "ports": "10x GE RJ45 ports, 2x SFP ports",
        "image": ICON_BASE + "firewall.svg",
        "price": 1500,
    },
    "coreSwitch": {
        "name": "Cisco Catalyst 9200 24-port Switch",
        "specs": "Quad-core CPU, 8 GB DRAM, 16 GB flash memory",
        "ports": "24x GE ports, 4x 10G SFP+ uplink ports",
        "image": ICON_BASE + "switch.svg",
        "price": 3000,
    },
    "server": {
        "name": "Dell PowerEdge R440 Rack Server",
        "specs": "Intel Xeon Silver 4210, 32 GB RAM, 2x 480GB SSD",
        "ports": "4x 1GbE",
        "image": ICON_BASE + "server.svg",
        "price": 5000,
    },
    "printer": {
        "name": "HP LaserJet Pro M404dn",
        "specs": "1200 MHz processor, 256 MB memory",
        "ports": "1x Gigabit Ethernet, 1x Hi-Speed USB 2.0",
        "image": ICON_BASE + "printer.svg",
        "price": 500,
    },
    "wirelessController": {
        "name": "Cisco 3504 Wireless Controller",
        "specs": "4-core CPU, 8 GB DRAM",
        "ports": "8x GE ports",
        "image": ICON_BASE + "wifi.svg",
        "price": 2000,
    },
    "accessPoint": {
        "name": "Cisco Aironet 2800 Series Access Point",
        "specs": "4x4 MU-MIMO with 3 spatial streams",
        "ports": "1x GE",
        "image": ICON_BASE + "access-point.svg",
        "price": 500,
    },
    "vpnLicense": {
        "name": "Cisco AnyConnect Secure Mobility Client",
        "price": 50,
    },
}

# Icons for node kinds that are not purchasable devices
KIND_IMAGES = {
    "internet": ICON_BASE + "cloud.svg",
    "department": ICON_BASE + "domain.svg",
    "user": ICON_BASE + "desktop-classic.svg",
    "vpnConcentrator": ICON_BASE + "vpn.svg",
    "remoteUsers": ICON_BASE + "account-group.svg",
}


def device_price(kind: str) -> int:
    return DEVICE_DATA[kind]["price"]


def device_name(kind: str) -> str:
    return DEVICE_DATA[kind]["name"]


def image_for(kind: str) -> str:
    if kind in DEVICE_DATA and "image" in DEVICE_DATA[kind]:
        return DEVICE_DATA[kind]["image"]
    return KIND_IMAGES.get(kind, ICON_BASE + "help-circle.svg")
